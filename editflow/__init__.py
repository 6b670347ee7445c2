"""
editflow
========
Turns a natural-language request and a set of seed files into either an
answer about the code or a set of applied file changes.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

__version__ = "0.1.0"
