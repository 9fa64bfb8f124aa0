# Core Cryptography Module
"""
Arithmetic and padding engine:
- Radix conversion and string codecs
- Big-integer digit arithmetic
- Montgomery modular exponentiation
- Classic and Barrett modular exponentiation
- EME-PKCS1-v1_5 chunking and padding
"""
