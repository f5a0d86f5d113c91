SCHEMA_SQL = r"""
-- Categories
CREATE TABLE IF NOT EXISTS categories (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  categoryname TEXT NOT NULL,
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now')),
  updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now'))
);

-- Locations (warehouses, shops)
CREATE TABLE IF NOT EXISTS locations (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  locationname TEXT NOT NULL,
  address TEXT,
  is_active INTEGER NOT NULL DEFAULT 1,
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now')),
  updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now'))
);

-- Goods
CREATE TABLE IF NOT EXISTS goods (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  idcategory INTEGER NOT NULL,
  code TEXT NOT NULL,
  name TEXT NOT NULL,
  price REAL NOT NULL DEFAULT 0,
  stock INTEGER NOT NULL DEFAULT 0,
  damaged_stock INTEGER NOT NULL DEFAULT 0,
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now')),
  updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now')),
  FOREIGN KEY (idcategory) REFERENCES categories(id)
);

-- Per-location quantity of a good
CREATE TABLE IF NOT EXISTS location_stocks (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  idgood INTEGER NOT NULL,
  idlocation INTEGER NOT NULL,
  stock INTEGER NOT NULL DEFAULT 0,
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now')),
  updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now')),
  UNIQUE (idgood, idlocation),
  FOREIGN KEY (idgood) REFERENCES goods(id) ON DELETE CASCADE,
  FOREIGN KEY (idlocation) REFERENCES locations(id)
);

-- Wallets / money types
CREATE TABLE IF NOT EXISTS financial_categories (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL UNIQUE,
  is_primary INTEGER NOT NULL DEFAULT 0,
  is_active INTEGER NOT NULL DEFAULT 1,
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now')),
  updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now'))
);

CREATE TABLE IF NOT EXISTS transaction_descriptions (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  descriptionname TEXT NOT NULL,
  type TEXT NOT NULL,                    -- in / out
  is_active INTEGER NOT NULL DEFAULT 1,
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now')),
  UNIQUE (descriptionname, type)
);

-- Stock movements
CREATE TABLE IF NOT EXISTS goods_history (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  idgood INTEGER NOT NULL,
  idlocation INTEGER NOT NULL,
  stock INTEGER NOT NULL,                -- quantity moved
  type TEXT NOT NULL,                    -- in / out / adjustment / initial
  payment_type INTEGER,
  price REAL NOT NULL DEFAULT 0,
  description TEXT,
  note TEXT,
  transaction_id INTEGER,
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now')),
  FOREIGN KEY (idgood) REFERENCES goods(id),
  FOREIGN KEY (idlocation) REFERENCES locations(id),
  FOREIGN KEY (payment_type) REFERENCES financial_categories(id)
);

CREATE TABLE IF NOT EXISTS transactions (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  type TEXT NOT NULL,                    -- in / out
  total REAL NOT NULL,
  id_description INTEGER,
  id_goods_history INTEGER,
  note TEXT,
  payment_type INTEGER,
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now')),
  FOREIGN KEY (id_description) REFERENCES transaction_descriptions(id),
  FOREIGN KEY (payment_type) REFERENCES financial_categories(id)
);

-- Stock marked unsellable
CREATE TABLE IF NOT EXISTS damaged_goods (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  idgood INTEGER NOT NULL,
  stock INTEGER NOT NULL,
  reason TEXT NOT NULL,
  reported_by TEXT,
  created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S+00:00', 'now')),
  FOREIGN KEY (idgood) REFERENCES goods(id)
);

-- One row per location stock, denormalized for display
CREATE VIEW IF NOT EXISTS goods_with_details AS
SELECT
  ls.id AS id,
  ls.idgood AS goods_id,
  g.idcategory AS idcategory,
  ls.idlocation AS idlocation,
  g.code AS code,
  g.name AS name,
  g.price AS price,
  COALESCE(ls.stock, 0) AS stock,
  COALESCE(g.damaged_stock, 0) AS damaged_stock,
  COALESCE(ls.stock, 0) AS available_stock,
  g.created_at AS created_at,
  ls.updated_at AS updated_at,
  COALESCE(c.categoryname, '') AS categoryname,
  COALESCE(l.locationname, '') AS locationname,
  COALESCE(l.address, '') AS locationaddress
FROM location_stocks ls
JOIN goods g ON g.id = ls.idgood
LEFT JOIN categories c ON c.id = g.idcategory
LEFT JOIN locations l ON l.id = ls.idlocation;
"""

TABLES = [
    "categories",
    "locations",
    "goods",
    "location_stocks",
    "goods_history",
    "damaged_goods",
    "transactions",
    "financial_categories",
    "transaction_descriptions",
]
