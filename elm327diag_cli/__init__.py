# elm327diag_cli/__init__.py
