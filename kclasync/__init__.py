"""Asyncio processors for the KCL MultiLang Daemon protocol."""

__version__ = "0.1.0"