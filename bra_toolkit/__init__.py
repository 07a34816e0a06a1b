"""BRA Toolkit - Patch Tokyo Xanadu .bra archives in place."""

__version__ = "0.1.0"
