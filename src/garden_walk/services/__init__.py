"""
Shared service utilities.

- http.py  - requests Session with retry and a default timeout
"""
