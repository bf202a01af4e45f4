"""Face Access package.

Feature modules (employees, attendance, audit, reports, users) each hold a
model, a repository protocol with its MySQL implementation, a service and a
thin Flask JSON controller. `main.create_app` wires them together.
"""
