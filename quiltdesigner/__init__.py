"""Quilt Designer — drag-and-drop layout of photo squares on a quilt."""
