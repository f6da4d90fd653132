"""Social Search - Distributed authenticated searches across social platforms

Turns investigation records (companies, products, incident keywords) into
search strings and spreads them across pre-authenticated browser sessions,
one per account, so no single account carries all the traffic.

Architecture:
- search_strings.py: Query generation (by incident / by company-or-product)
- session.py: Session acquisition per credential (stored state or login)
- partition.py: Contiguous work shares per credential
- pacing.py: Random delays between automated actions
- facebook.py / instagram.py: Platform login routines and search URLs
- browser.py: Selenium Firefox engine
- app.py: FastAPI planning endpoints
- cli.py: Command line entry point
"""

__version__ = "1.0.0"
