# Veloura Checkout Service
