"""framespdf: upload media, run ffmpeg/ImageMagick jobs, download the results."""

__version__ = "0.1.0"
