#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
	WSGI entry point for the HybridSeal Flask application.
	The WSGI server loads this file and calls `application`, which must
	reference the Flask app returned by create_app(). Configuration comes
	from the HYBRIDSEAL_* environment variables.
"""

# Import the Flask app factory
from hybridseal.server import create_app

# WSGI servers require this symbol
application = create_app()
