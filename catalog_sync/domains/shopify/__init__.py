"""
Shopify source domain: bulk export, record assembly and normalization
"""
