"""
Asset domain: re-hosting product images in durable storage
"""
