from .opencv_visualizer import OpenCVVisualizer
