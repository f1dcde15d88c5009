"""Natural language processing for German travel requests.

This subpackage groups the rule-based intent parser, fuzzy matching of
station names and phonetic correction of misheard queries.
"""
