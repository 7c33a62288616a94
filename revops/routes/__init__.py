"""Routes that proxy a vendor API without a domain layer"""
