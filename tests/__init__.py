"""Unit tests for LingoPaste.

This package contains test modules for the paste clients, the translation cache and the view controller.
Tests use pytest with asyncio support; HTTP is exercised against in-process aiohttp test servers.
"""
