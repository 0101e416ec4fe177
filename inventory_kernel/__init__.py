"""
Inventory Kernel

Server-side core of the stock-counting application:
- Inventories, sectors, product lines and physical counts
- Inventory closing/reopening workflow with a three-part closing gate
- Sector finalize/reopen state machine
- Divergence accounting (counted vs expected quantities)
- Best-effort audit trail of lifecycle transitions
"""

__version__ = "0.1.0"
