"""
Operator tools for the Automagixx chatbot.
"""
