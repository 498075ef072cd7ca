"""Makine bakım takibi: iş akışı ve planlama motoru."""
