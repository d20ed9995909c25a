"""
Scheduling core: the pool, its ports and the Deferred helper.
"""
