"""
🖥️ Командний рядок `real-price`.
"""
