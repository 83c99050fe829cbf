"""Service layer for the Pixel Canvas application."""
