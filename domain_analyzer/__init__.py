"""
Domain Analyzer

Single-page SEO analysis for a web domain:
1. Fetches the homepage and extracts on-page technical signals
2. Queries page-performance and domain-authority providers in parallel
3. Aggregates a weighted 0-100 composite score
4. Optionally writes a markdown report with Claude (reused on exact repeats)
5. Persists the analysis and its findings
"""

__version__ = "0.1.0"
