from .pipeline import RenderedImage, convert_file, convert_pdf

__version__ = "0.1.0"
