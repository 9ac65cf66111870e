# touristguide/__init__.py
"""Клиент справочника достопримечательностей Сурата."""

from .app import TouristGuideApp

__all__ = ['TouristGuideApp']
