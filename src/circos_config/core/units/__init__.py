"""Unit engine e resolver de expressões dimensionais."""
