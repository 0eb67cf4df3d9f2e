"""
Snippety — Services Layer
===========================

    - SnippetStore: create / get / latest over the snippets table
"""
