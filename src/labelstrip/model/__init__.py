"""
The MODEL layer contains pure data structures and business logic.
It has NO knowledge of the GUI, the rasterizer or the PDF writer.
It deals with Grid partitioning, Region algebra, Placement geometry and I/O.
"""
