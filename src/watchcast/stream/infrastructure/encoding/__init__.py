from .jpeg_encoder import JpegEncoder
