"""
Notebox — Services Layer
==========================

Service Inventory:
    - NoteStore: create / find / update / delete for the note table
"""
