"""HTTP surface for Domain Analyzer."""
