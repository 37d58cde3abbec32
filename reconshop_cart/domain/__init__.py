"""
Cart domain layer: value objects, entities, services and repository contracts
"""
