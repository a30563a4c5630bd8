"""
services/ - Business Logic Layer
=================================
The billing calculator, renewal advancer and aggregate engine are pure
functions that take "today" explicitly. The application services on top
of them parse user input and render results for the bot.
"""
