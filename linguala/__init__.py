"""Linguala translation and writing assistant backend."""
