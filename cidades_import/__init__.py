"""CSV import & normalization pipeline for municipality records.

Parses delimited text exports (city records, council members, election
results, valid-vote counts), matches them against the registered cities and
writes the confirmed subset to PostgreSQL.
"""

__version__ = "0.3.0"
