"""
HRMS - Services Package

Business logic services. Services take an AsyncSession and, for mutating
operations, a RequestContext (actor, cache, event dispatcher).
"""
