"""
Pooling domain package.

Public API:
- Domain models: PoolAssignment, PoolStop, StopType, DriverCandidates
- Optimizer entry: optimize_pool, optimize_multi_driver_pools
- Helpers: marginal_detour_km, order_stops
"""
from .insertion import marginal_detour_km
from .models import DriverCandidates, PoolAssignment, PoolStop, StopType
from .optimizer import optimize_multi_driver_pools, optimize_pool
from .stops import enforce_pickup_before_dropoff, order_stops

__all__ = [
    "DriverCandidates",
    "PoolAssignment",
    "PoolStop",
    "StopType",
    "marginal_detour_km",
    "optimize_pool",
    "optimize_multi_driver_pools",
    "enforce_pickup_before_dropoff",
    "order_stops",
]
