"""Domain layer: digest models and rendering"""
