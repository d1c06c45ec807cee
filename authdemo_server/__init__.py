"""AuthDemo backend: agent gateway and demo content store"""
