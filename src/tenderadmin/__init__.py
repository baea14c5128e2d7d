"""
TenderAdmin - Terminal-first administration console for a tender-listing service.

A CLI tool and client library that manages tenders, subscribers and
reference data through the service's REST API.
"""

__version__ = "0.1.0"
__app_name__ = "tenderadmin"
