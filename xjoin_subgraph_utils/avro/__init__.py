# Copyright 2022-present Kensho Technologies, LLC.
