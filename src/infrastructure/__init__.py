"""Infrastructure Layer.

Adapters that perform I/O (filesystem, network, geodesy backend) and return
domain Value Objects.
"""
