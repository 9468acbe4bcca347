"""Library-specific binding configurations"""
