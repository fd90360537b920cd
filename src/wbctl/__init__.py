"""wbctl - tenant fleet controller.

Keeps a registry of independently deployed application instances and brings
each instance's container set (network, database, optional admin service,
application) up or down in dependency order.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
