"""
Pricing policy — deterministic tiered formulas per survey service.

Pure Python math. Given clamped acreage and a service's option block,
produce a priced quote with an itemized breakdown, or a manual-quote sentinel.
"""
