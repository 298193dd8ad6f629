"""
Practice services: patients, appointments, tasks, agents and the
spreadsheet patient importer.
"""
