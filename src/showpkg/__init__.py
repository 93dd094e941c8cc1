"""
show-package: export a firewall management policy package as an HTML/tar.gz report.

Design goals:
- one validated run configuration, resolved once from the command line
- an exclusive, freshly created staging directory per run
- accumulation files that are always closed and removed, on success or failure
"""
