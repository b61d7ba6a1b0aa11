# Mock Commerce Backend
