"""Tests of gamecord."""
