#!/usr/bin/env python3
"""
Tests for SQL statement inspection.
"""

import time

import pytest

from dbview_query.sql import (
    SqlStatementType, detect_statement_type, get_sql_keywords, is_sql_keyword, parse_sql
)


class TestStatementType:
    """Test statement classification."""

    @pytest.mark.parametrize('sql,statement_type', [
        ('SELECT 1', SqlStatementType.SELECT),
        ('  select * from t', SqlStatementType.SELECT),
        ('(SELECT 1)', SqlStatementType.SELECT),
        ('-- note\n  select 1', SqlStatementType.SELECT),
        ('/* header */ INSERT INTO t VALUES (1)', SqlStatementType.INSERT),
        ('with x as (select 1) select * from x', SqlStatementType.WITH),
        ('EXPLAIN SELECT 1', SqlStatementType.EXPLAIN),
        ('truncate logs', SqlStatementType.TRUNCATE),
        ('BEGIN', SqlStatementType.BEGIN),
        ('VACUUM', SqlStatementType.UNKNOWN),
        ('', SqlStatementType.UNKNOWN),
        (None, SqlStatementType.UNKNOWN),
        ("'SELECT'", SqlStatementType.UNKNOWN),
    ])
    def test_detect(self, sql, statement_type):
        """Test the leading keyword decides the type."""
        assert detect_statement_type(sql) is statement_type

    def test_is_modifying(self):
        """Test which statement types modify data or schema."""
        assert parse_sql('DROP TABLE t').is_modifying
        assert parse_sql('UPDATE t SET a = 1').is_modifying
        assert not parse_sql('SELECT 1').is_modifying
        assert not parse_sql('BEGIN').is_modifying
        assert not SqlStatementType.GRANT.is_modifying


class TestTables:
    """Test table extraction."""

    def test_simple_select(self):
        """Test the documented example."""
        parsed = parse_sql('SELECT name, age FROM users WHERE id = 1')
        assert parsed.statement_type is SqlStatementType.SELECT
        assert parsed.tables == ['users']
        assert parsed.columns == ['name', 'age']
        assert parsed.has_where
        assert not parsed.has_limit
        assert not parsed.has_order_by
        assert parsed.sql == 'SELECT name, age FROM users WHERE id = 1'

    def test_join(self):
        """Test FROM and JOIN tables with schemas and aliases."""
        parsed = parse_sql(
            'SELECT u.id, o.total AS amount FROM public.users u '
            'JOIN orders o ON o.user_id = u.id ORDER BY o.total LIMIT 10'
        )
        assert parsed.tables == ['users', 'orders']
        assert parsed.columns == ['id', 'amount']
        assert parsed.has_order_by
        assert parsed.has_limit

    def test_comma_separated_from(self):
        """Test several tables in one FROM."""
        assert parse_sql('SELECT * FROM a, b AS bb, schema1.c').tables == ['a', 'b', 'c']

    def test_insert_with_column_list(self):
        """Test a quoted INSERT target with a column list."""
        parsed = parse_sql('INSERT INTO "Audit Log" (id, msg) VALUES (1, \'x\')')
        assert parsed.statement_type is SqlStatementType.INSERT
        assert parsed.tables == ['Audit Log']
        assert parsed.columns == []
        assert parsed.is_modifying

    def test_update_and_delete(self):
        """Test UPDATE and DELETE targets."""
        assert parse_sql('UPDATE accounts SET balance = 0 WHERE id = 7').tables == ['accounts']
        assert parse_sql('DELETE FROM sessions').tables == ['sessions']

    def test_subquery(self):
        """Test tables inside a derived table."""
        parsed = parse_sql('SELECT * FROM (SELECT id FROM items) sub')
        assert parsed.tables == ['items']
        assert parsed.columns == ['*']

    def test_from_inside_function_is_not_a_table(self):
        """Test EXTRACT(... FROM ...) is skipped."""
        parsed = parse_sql('SELECT EXTRACT(YEAR FROM created_at) AS yr FROM events')
        assert parsed.tables == ['events']
        assert parsed.columns == ['yr']

    def test_is_distinct_from(self):
        """Test IS DISTINCT FROM is not a FROM clause."""
        assert parse_sql('SELECT a FROM t WHERE a IS DISTINCT FROM b').tables == ['t']

    def test_for_update(self):
        """Test FOR UPDATE does not name a table."""
        parsed = parse_sql('SELECT * FROM t FOR UPDATE')
        assert parsed.tables == ['t']
        assert parsed.statement_type is SqlStatementType.SELECT

    def test_union(self):
        """Test both sides of a UNION."""
        parsed = parse_sql('SELECT a FROM t1 UNION SELECT b FROM t2')
        assert parsed.tables == ['t1', 't2']
        assert parsed.columns == ['a']

    def test_only_and_quoting(self):
        """Test ONLY and backtick quoting."""
        assert parse_sql('SELECT * FROM ONLY parent_table').tables == ['parent_table']
        assert parse_sql('SELECT `id` FROM `db`.`users`').tables == ['users']

    def test_table_function_skipped(self):
        """Test set-returning functions are not tables."""
        assert parse_sql('SELECT * FROM generate_series(1, 3) g').tables == []

    def test_duplicates_removed(self):
        """Test each table is listed once."""
        assert parse_sql('SELECT * FROM t JOIN t ON true').tables == ['t']


class TestLargeInput:
    """Test inspection stays fast on long scripts."""

    def test_many_from_clauses(self):
        """Test thousands of FROM clauses parse in well under a second."""
        sql = 'SELECT a FROM t1 UNION ' * 2000 + 'SELECT 1'
        started = time.perf_counter()
        parsed = parse_sql(sql)
        assert time.perf_counter() - started < 0.5
        assert parsed.tables == ['t1']

    def test_nested_subqueries(self):
        """Test subquery tables are found deep into a long statement."""
        sql = ' UNION '.join(f'SELECT x FROM (SELECT x FROM t{i % 3}) s{i}' for i in range(1500))
        started = time.perf_counter()
        parsed = parse_sql(sql)
        assert time.perf_counter() - started < 0.5
        assert parsed.tables == ['t0', 't1', 't2']

    def test_distinct_across_lines(self):
        """Test IS DISTINCT FROM split over lines is still not a table clause."""
        assert parse_sql('SELECT a FROM t WHERE a IS DISTINCT\n\n    FROM b').tables == ['t']


class TestColumns:
    """Test select-list extraction."""

    def test_star(self):
        """Test SELECT *."""
        assert parse_sql('SELECT * FROM t').columns == ['*']

    def test_implicit_aliases(self):
        """Test aliases without AS."""
        assert parse_sql('SELECT count(*) total, price * qty line_total FROM t').columns == \
            ['total', 'line_total']

    def test_keyword_is_not_alias(self):
        """Test a trailing keyword is not mistaken for an alias."""
        assert parse_sql('SELECT CASE WHEN x THEN 1 ELSE 0 END FROM t').columns == []
        assert parse_sql('SELECT CASE WHEN x THEN 1 ELSE 0 END AS flag FROM t').columns == ['flag']

    def test_distinct(self):
        """Test DISTINCT is not a column."""
        assert parse_sql('SELECT DISTINCT city FROM t').columns == ['city']

    def test_quoted_columns(self):
        """Test double-quoted and bracketed names."""
        assert parse_sql('SELECT "First Name", [Last Name] FROM t').columns == ['First Name', 'Last Name']

    def test_literal_with_alias(self):
        """Test a literal with an alias."""
        assert parse_sql("SELECT 'x' AS label FROM t").columns == ['label']

    def test_comments_ignored(self):
        """Test comments do not leak into names."""
        parsed = parse_sql('SELECT id -- the key\nFROM users')
        assert parsed.columns == ['id']
        assert parsed.tables == ['users']

    def test_unnamed_expressions_skipped(self):
        """Test expressions without a name contribute nothing."""
        assert parse_sql('SELECT COUNT(*) FROM t').columns == []

    def test_non_select(self):
        """Test only SELECT statements have columns."""
        assert parse_sql('UPDATE t SET a = 1').columns == []


class TestFlags:
    """Test clause flags."""

    def test_fetch_first_is_limit(self):
        """Test FETCH FIRST counts as a limit."""
        assert parse_sql('SELECT * FROM t FETCH FIRST 5 ROWS ONLY').has_limit

    def test_keywords_in_literals_ignored(self):
        """Test flags ignore string contents."""
        parsed = parse_sql("SELECT 'limit where order by' FROM t")
        assert not parsed.has_limit
        assert not parsed.has_where
        assert not parsed.has_order_by

    def test_none_input(self):
        """Test None parses as empty."""
        parsed = parse_sql(None)
        assert parsed.statement_type is SqlStatementType.UNKNOWN
        assert parsed.tables == []
        assert parsed.columns == []
        assert parsed.sql == ''


class TestKeywords:
    """Test keyword helpers."""

    def test_is_sql_keyword(self):
        """Test case-insensitive keyword lookup."""
        assert is_sql_keyword('select')
        assert is_sql_keyword(' From ')
        assert is_sql_keyword('varchar')
        assert not is_sql_keyword('users')
        assert not is_sql_keyword('=')
        assert not is_sql_keyword(None)

    def test_get_sql_keywords(self):
        """Test the keyword groups."""
        keywords = get_sql_keywords()
        assert 'SELECT' in keywords.statements
        assert 'WHERE' in keywords.clauses
        assert 'COUNT' in keywords.functions
        assert 'JSONB' in keywords.data_types
        assert '->>' in keywords.operators
        assert keywords.literals == ('NULL', 'TRUE', 'FALSE')
