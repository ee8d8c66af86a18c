"""
Inventory ledger tables.

Models:
- InventarioOficina / InventarioLimpieza / InventarioGarrafon (stored quantity per item)
- MovimientoInventario (append-only audit of every quantity change, keyed by category + item id)
- MovimientoGarrafones (alternate jug/seal/cap ledger keyed by product name; stock is the signed sum)
"""
