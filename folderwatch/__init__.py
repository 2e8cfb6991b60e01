"""
folderwatch - scheduled directory change reporting
"""
__version__ = "1.0.0"
