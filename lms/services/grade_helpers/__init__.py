"""
Pure grade aggregation engine.

Nothing in this package performs I/O or keeps state between calls: every
function takes a list of grade records (mappings or attribute objects) and
returns a freshly built result, so the functions are safe to call from
concurrent requests.
"""
