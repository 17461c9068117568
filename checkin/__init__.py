"""
Flight check-in operations service.

Tracks flight records, passenger manifests, check-in/boarding/offload
transitions, baggage counts and ground-movement logs per flight-date pair,
and pushes every change in real time to the viewers watching that flight:

1. Record store keyed by normalized flight number and date
2. Passenger lifecycle with flight-status guards
3. Room-scoped subscription hub with fire-and-forget fan-out
4. Bulk passenger import from delimited text

All state is held in process memory for the lifetime of the service.
"""

__version__ = "0.1.0"
