"""Sphinx configuration for Adjustment Allocation documentation."""

import os
import sys

sys.path.insert(0, os.path.abspath("../.."))

project = "Adjustment Allocation"
author = "Billing Operations"
extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "myst_parser",
]

source_suffix = {
    ".rst": "restructuredtext",
    ".md": "markdown",
}
exclude_patterns = ["build"]
html_theme = "sphinx_rtd_theme"
html_theme_options = {
    "navigation_depth": 2,
}

autodoc_member_order = "bysource"
napoleon_numpy_docstring = True
napoleon_google_docstring = False
