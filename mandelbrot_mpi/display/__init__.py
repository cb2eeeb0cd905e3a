"""Display surface and image export of the root participant"""
