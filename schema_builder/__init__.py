"""
JSON Schema Builder.

Editing engine for nested field schemas (field tree, compiler, validator)
plus the schema store and the Streamlit pages built on top of them.
"""
