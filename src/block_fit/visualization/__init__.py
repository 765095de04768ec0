"""Pygame frontend for Block Fit."""
