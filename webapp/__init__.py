"""Web App Module"""
