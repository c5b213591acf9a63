"""Verso - command line front end for the incremental notes renderer."""
