"""PixelReel: AI image and video generation behind subscription tiers."""

__version__ = "0.1.0"
