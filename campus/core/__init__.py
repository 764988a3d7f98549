"""
Core utilities shared across the campus site.

This package hosts:
- configuration helpers (env vars, paths, feature flags)
- logging setup
- cross-cutting helpers such as password hashing, CSRF tokens and the
  login rate limiter.

Services and routers depend on these primitives instead of reading
os.environ directly.
"""
