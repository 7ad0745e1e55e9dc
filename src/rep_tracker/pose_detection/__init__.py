"""
Pose input: landmark data model, frame sources, smoothing and joint-angle geometry.
"""
