"""
Layout geometry and state: alignment solver, overlap validator, layout graph
and the spatial host contract.
"""
