"""
labelstrip: carve a rasterized page into cutouts and lay them out on a label strip.
"""
