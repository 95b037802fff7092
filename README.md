# optima

`optima` is a library for building multi-agent systems whose work runs as
**transactions** on a pool of worker threads. Inside a transaction, agents can
send messages and ask to create, start, stop or destroy other agents. These
effects are logged under the transaction's id. They take effect when the
transaction's code calls `commit(id)` on the agent manager or postmaster, and
`rollback(id)` discards them. The engine does not commit on its own.

The package has no command-line interface. Use it from Python.

## Modules

### `optima.model`

`MultiAgentModel` describes a system. It has these methods:

- `add_agent_template(template_id, factory, initial_number, maximum_number, start_initially)`
- `add_plugin(plugin_id, factory, plugin_type)`
- `add_supervisor(supervisor_id, subordinate_id)`. This also opens a communication channel between the two types.
- `add_communication(template_id1, template_id2)`
- `allow_plugin_use(agent_template_id, plugin_id)`
- `set_thread_number`
- `set_transaction_factory`
- `set_scheduler_settings`
- `set_batch_size`
- `set_trigger`
- `set_estimator`
- `use_default_estimator(path)`
- `keep_stats_file(path)`

An unknown or duplicate id raises `InvalidModelParameterError`.

`SchedulerSettings` is a dataclass. Its main field is `optimized` (default `False`).

### `optima.driver`

`Driver(scheduler_factory=None)` runs a model.

- `start_model(model)` blocks until `halt_program(output)` is called, usually from inside a transaction. It then stops the worker threads.
- `get_output_parameters()` waits for the halt and returns `output`.
- With `keep_stats_file`, the run ends by writing `type,subtype,average_ns` lines.

### `optima.transaction_factory`

`TransactionFactory` is the class you subclass to supply work. Implement:

- `generate_initial_transactions()`
- `generate_transactions(txn, result)`, which returns the follow-ups of a finished transaction.

### Transactions

Transactions are plain objects. No base class is provided. The listener sets
these attributes on each one:

- `id`
- `driver`
- `agent_manager`
- `postmaster`
- `length`, only when an estimator is used.

The listener also calls `find_non_shareable(plugin_manager)`.

The executor reads `type`, `sub_type` and `non_shareable_plugins`. It calls
`execute()`, which should return a `TransactionResult`.

### `optima.transaction_queue`

This module provides:

- `TransactionStatus` (`COMMITTED`, `ABORTED`)
- `TransactionResult(status, error_message=None, result_parameters=None)`
- `TransactionQueue`, a blocking FIFO with these methods:
  - `push`, `silent_push`
  - `pull`, `pull_all`
  - `trigger`, `exit`
  - `is_empty`

### `optima.agents`

`Agent` is the abstract base class for agents. Implement `clear_memory()`.

An agent can:

- run a plugin with `operate_plugin`;
- message other agents with `send_message` and `send_message_to_all`;
- manage agents with `create_agent`, `create_and_start_agent`, `start_agent`, `stop_agent` and `destroy_agent`;
- read agent records with `get_agent_info_by_id` and `get_agent_info_by_type`;
- read its mail with `check_messages()`.

Requests return `[(True,)]` on success and `[(False, reason)]` when refused.

`AgentPool` creates agents of one type and recycles returned ones.

### `optima.agent_manager`

`AgentManager` owns every agent and checks supervisor permissions.

- Requests are logged per transaction.
- `commit(id)` applies the logged requests; `rollback(id)` discards them.
- `seize_agent(transaction_id, agent_type)` assigns the first active agent of a type, or raises `AgentUnavailableError`.
- `release_agent(agent_id)` makes an assigned agent available again.

### `optima.postmaster` and `optima.messaging`

- `Postmaster` logs messages per transaction and delivers them to each receiver's `PostBox` on `commit`.
- `Message` is a dataclass with `prompt`, `parameters`, the sender and receiver fields and `time_stamp`.

### `optima.plugin_manager`

- `PluginInstance` is the abstract base for plugins. Implement `operate(input_parameters)`.
- `PluginManager` lets only permitted agent types seize a plugin.
- A `PluginType.NONSHAREABLE` plugin can be seized by one holder at a time until it is released.

### `optima.listener` and `optima.executor`

- `Listener` numbers incoming transactions and queues them.
- `Executor` runs queued transactions on worker threads. While a transaction runs, its non-shareable plugins are locked. With stats on, it records per-type timings, which `get_stats()` returns.

### `optima.estimator`

- `Estimator` is the abstract interface.
- `DefaultEstimator(path)` reads `type,subtype,length` lines. For known pairs it returns the recorded length; for others it returns the average of all lengths.

### `optima.exceptions`

Every error is a subclass of `OptiMAError`:

- `UnauthorizedAccessError`
- `AgentLimitError`
- `AgentUnavailableError`
- `PluginLimitError`
- `InvalidModelParameterError`
- `UserAbortError`

### Workload helpers

- `optima.jobs`:
  - `JobCreator` generates random factory-floor `Job`s, each a queue of operation lists.
  - `JobCreator.from_file` loads saved jobs.
  - `parse_job_line` and `format_job` read and write the line format `kind|sub,kind|sub;...`.
- `optima.random_numbers`: seedable `UniformRandom` and `NormalRandom`. `NormalRandom` redraws until its value is positive.
- `optima.combinatorics` provides:
  - `combination`, `factorial`
  - `encode_bits`, `encode_combination`
  - `decode_combination`, `decode_permutation`
  - `find_place`, `find_insert_place`

## Example

```python
from optima.agents import Agent
from optima.driver import Driver
from optima.model import MultiAgentModel
from optima.transaction_factory import TransactionFactory
from optima.transaction_queue import TransactionResult, TransactionStatus


class Worker(Agent):
    def clear_memory(self):
        pass


class Step:
    type = 0
    sub_type = 0

    def __init__(self, n):
        self.n = n
        self.non_shareable_plugins = set()

    def find_non_shareable(self, plugin_manager):
        self.non_shareable_plugins = plugin_manager.non_shareable(set())

    def execute(self):
        if self.n == 3:
            self.driver.halt_program(self.n)
        return TransactionResult(TransactionStatus.COMMITTED)


class Steps(TransactionFactory):
    def generate_initial_transactions(self):
        return [Step(0)]

    def generate_transactions(self, txn, result):
        return [] if txn.n == 3 else [Step(txn.n + 1)]


model = MultiAgentModel()
model.add_agent_template(0, Worker, 1, 1, True)
model.set_transaction_factory(Steps())
driver = Driver()
driver.start_model(model)
print(driver.get_output_parameters())  # 3
```

## What the package does not do

The package does not include a scheduler or schedule solver for optimized
runs. A model whose `SchedulerSettings.optimized` is true starts only if you
pass `Driver` a `scheduler_factory`. That factory must return an object with:

- `insert_transaction_queue`
- `start_scheduling`
- `close`

The package also does not include ready-made factory-floor agents, plugins,
transactions or a benchmark runner. `optima.jobs` only generates, saves and
loads job descriptions.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```